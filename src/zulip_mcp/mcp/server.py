import inspect
import logging

from zulip_mcp import __version__
from zulip_mcp.mcp.dispatcher import ToolDispatcher
from zulip_mcp.zulip import connected_workspace


SERVER_NAME = 'Zulip MCP Server'


class McpDependencyNotInstalled(Exception):
    pass


def import_mcp_server():
    try:
        from mcp.server.lowlevel import Server
    except ModuleNotFoundError as module_not_found_error:
        raise McpDependencyNotInstalled(
            'Zulip MCP Server requires the mcp package. '
            'Install with: pip install zulip-mcp-server'
        ) from module_not_found_error
    return Server


def accepts_keyword(callable_object, keyword):
    try:
        signature = inspect.signature(callable_object)
    except (TypeError, ValueError):
        return False
    return any(
        parameter.kind == inspect.Parameter.VAR_KEYWORD or name == keyword
        for name, parameter in signature.parameters.items()
    )


def create_server(dispatcher):
    server_class = import_mcp_server()
    from mcp import types

    server_arguments = {'name': SERVER_NAME}
    if accepts_keyword(server_class, 'version'):
        server_arguments['version'] = __version__
    mcp_server = server_class(**server_arguments)

    @mcp_server.list_tools()
    async def list_tools():
        logging.getLogger(__name__).debug('Received list tools request')
        return [
            types.Tool(
                name=descriptor.name,
                description=descriptor.description,
                inputSchema=descriptor.input_schema,
            )
            for descriptor in dispatcher.list_tools()
        ]

    # Registered directly so that absent arguments reach the dispatcher as None.
    async def call_tool(request):
        response = await dispatcher.dispatch(
            request.params.name,
            request.params.arguments,
        )
        return types.ServerResult(
            types.CallToolResult(
                content=[
                    types.TextContent(type='text', text=item['text'])
                    for item in response['content']
                ],
                isError=False,
            )
        )

    mcp_server.request_handlers[types.CallToolRequest] = call_tool
    return mcp_server


async def serve_stdio(mcp_server):
    from mcp.server.stdio import stdio_server

    async with stdio_server() as (read_stream, write_stream):
        logging.getLogger(__name__).info('%s running on stdio', SERVER_NAME)
        await mcp_server.run(
            read_stream,
            write_stream,
            mcp_server.create_initialization_options(),
        )


TRANSPORTS = {
    'stdio': serve_stdio,
}


async def serve_workspace(credentials, transport='stdio'):
    serve = TRANSPORTS[transport]
    async with connected_workspace(credentials) as workspace:
        mcp_server = create_server(ToolDispatcher(workspace))
        await serve(mcp_server)
