import asyncio
import contextlib
import json
from importlib.util import find_spec
from unittest.mock import patch

from mcp import types
from mcp.shared.memory import create_connected_server_and_client_session

from reahl.tofu import NoException
from reahl.tofu import expected

from zulip_mcp import __version__
from zulip_mcp.mcp.dispatcher import ToolDispatcher
from zulip_mcp.mcp.server import McpDependencyNotInstalled
from zulip_mcp.mcp.server import TRANSPORTS
from zulip_mcp.mcp.server import create_server
from zulip_mcp.mcp.server import import_mcp_server
from zulip_mcp.mcp.server import serve_workspace


def test_import_mcp_server_matches_environment_dependency_state():
    expected_exception = (
        McpDependencyNotInstalled
        if find_spec('mcp.server.lowlevel') is None
        else NoException
    )
    with expected(expected_exception):
        import_mcp_server()


class FakeServer:
    def __init__(self, name, version):
        self.name = name
        self.version = version
        self.handlers = {}
        self.request_handlers = {}

    def list_tools(self):
        def register(function):
            self.handlers['list_tools'] = function
            return function

        return register


class FakeServerWithoutVersion:
    def __init__(self, name):
        self.name = name
        self.handlers = {}
        self.request_handlers = {}

    def list_tools(self):
        def register(function):
            self.handlers['list_tools'] = function
            return function

        return register


class StubWorkspace:
    async def list_users(self):
        return {'result': 'success', 'msg': '', 'members': []}


def call_tool_request(tool_name, arguments):
    return types.CallToolRequest(
        method='tools/call',
        params=types.CallToolRequestParams(name=tool_name, arguments=arguments),
    )


def test_create_server_registers_catalog_and_dispatch_handlers():
    with patch(
        'zulip_mcp.mcp.server.import_mcp_server',
        return_value=FakeServer,
    ):
        mcp_server = create_server(ToolDispatcher(StubWorkspace()))

    assert mcp_server.name == 'Zulip MCP Server'
    assert mcp_server.version == __version__

    tools = asyncio.run(mcp_server.handlers['list_tools']())
    assert [tool.name for tool in tools][0] == 'zulip_list_channels'
    assert len(tools) == 8
    post_message_tool = tools[1]
    assert post_message_tool.inputSchema['required'] == ['channel_name', 'topic', 'content']

    call_tool = mcp_server.request_handlers[types.CallToolRequest]
    server_result = asyncio.run(call_tool(call_tool_request('zulip_get_users', {})))
    contents = server_result.root.content
    assert len(contents) == 1
    assert contents[0].type == 'text'
    assert json.loads(contents[0].text) == {'result': 'success', 'msg': '', 'members': []}


def test_create_server_supports_mcp_without_version_argument():
    with patch(
        'zulip_mcp.mcp.server.import_mcp_server',
        return_value=FakeServerWithoutVersion,
    ):
        mcp_server = create_server(ToolDispatcher(StubWorkspace()))

    assert mcp_server.name == 'Zulip MCP Server'
    call_tool = mcp_server.request_handlers[types.CallToolRequest]
    server_result = asyncio.run(call_tool(call_tool_request('zulip_get_users', None)))
    assert json.loads(server_result.root.content[0].text) == {
        'error': 'No arguments provided'
    }


def test_real_server_reports_absent_arguments_to_a_client():
    mcp_server = create_server(ToolDispatcher(StubWorkspace()))

    async def exercise_server():
        async with create_connected_server_and_client_session(mcp_server) as client_session:
            tools_result = await client_session.list_tools()
            without_arguments = await client_session.call_tool('zulip_get_users', None)
            with_arguments = await client_session.call_tool('zulip_get_users', {})
            return tools_result, without_arguments, with_arguments

    tools_result, without_arguments, with_arguments = asyncio.run(exercise_server())

    assert [tool.name for tool in tools_result.tools][-1] == 'zulip_get_users'
    assert len(tools_result.tools) == 8
    assert json.loads(without_arguments.content[0].text) == {
        'error': 'No arguments provided'
    }
    assert not without_arguments.isError
    assert json.loads(with_arguments.content[0].text) == {
        'result': 'success',
        'msg': '',
        'members': [],
    }


def test_serve_workspace_connects_before_serving():
    events = []
    stub_workspace = StubWorkspace()

    @contextlib.asynccontextmanager
    async def fake_connected_workspace(credentials):
        events.append(('connected', credentials))
        yield stub_workspace
        events.append(('closed', credentials))

    async def fake_serve(mcp_server):
        events.append(('serving', mcp_server.name))

    with patch(
        'zulip_mcp.mcp.server.import_mcp_server',
        return_value=FakeServer,
    ):
        with patch(
            'zulip_mcp.mcp.server.connected_workspace',
            fake_connected_workspace,
        ):
            with patch.dict(TRANSPORTS, {'stdio': fake_serve}):
                asyncio.run(serve_workspace('credentials', 'stdio'))

    assert events == [
        ('connected', 'credentials'),
        ('serving', 'Zulip MCP Server'),
        ('closed', 'credentials'),
    ]
