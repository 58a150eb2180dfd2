"""MCP server exposing ``read_weixin_article`` over stdio.

MCP clients launch the reader as a subprocess and call the tool through the
Model Context Protocol. Stdout carries the protocol, so all logging must go
to stderr.
"""

from typing import Annotated

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from src.agent.article_tool import URL_PARAMETER_DESCRIPTION, ArticleTool


SERVER_NAME = "weixin-article-reader"

SERVER_INSTRUCTIONS = (
    "微信文章阅读器 MCP 服务。提供 read_weixin_article 工具，"
    "可以读取微信公众号文章的标题、作者、发布时间和正文内容。"
)


def build_server(tool: ArticleTool) -> FastMCP:
    """Create an MCP server with ``tool`` registered as its only tool.

    The handler returns the tool's JSON response as text, for failures as
    well as successes.
    """
    server = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)

    @server.tool(name=tool.name, description=tool.description)
    async def read_weixin_article(
        url: Annotated[str, Field(description=URL_PARAMETER_DESCRIPTION)],
    ) -> str:
        return await tool.call_json(url)

    return server
