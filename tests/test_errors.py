from zulip_mcp.errors import NotFoundError
from zulip_mcp.errors import RemoteCallError
from zulip_mcp.errors import UnknownToolError
from zulip_mcp.errors import ValidationError
from zulip_mcp.errors import message_for_error


def test_error_kinds_are_tagged():
    assert ValidationError('No arguments provided').kind == 'validation'
    assert UnknownToolError('x').kind == 'unknown_tool'
    assert NotFoundError('Stream "x" not found').kind == 'not_found'
    assert RemoteCallError('boom').kind == 'remote_call'


def test_unknown_tool_error_names_the_tool():
    error = UnknownToolError('nonexistent_tool')
    assert error.message == 'Unknown tool: nonexistent_tool'
    assert error.tool_name == 'nonexistent_tool'


def test_remote_call_error_keeps_its_cause():
    cause = ConnectionError('reset by peer')
    error = RemoteCallError('Error getting users: reset by peer', cause=cause)
    assert error.cause is cause
    assert str(error) == 'Error getting users: reset by peer'


def test_messages_are_extracted_or_stringified():
    assert message_for_error(ValidationError('No arguments provided')) == 'No arguments provided'
    assert message_for_error(ValueError('bad value')) == 'bad value'
