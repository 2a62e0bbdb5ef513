class DomainException(Exception):
    kind = 'error'

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ValidationError(DomainException):
    kind = 'validation'


class UnknownToolError(DomainException):
    kind = 'unknown_tool'

    def __init__(self, tool_name):
        super().__init__('Unknown tool: %s' % tool_name)
        self.tool_name = tool_name


class NotFoundError(DomainException):
    kind = 'not_found'


class RemoteCallError(DomainException):
    kind = 'remote_call'


class MissingCredentials(Exception):
    def __init__(self, variable_names):
        super().__init__(
            'Missing environment variables: %s' % ', '.join(variable_names)
        )
        self.variable_names = variable_names


def message_for_error(error):
    if isinstance(error, DomainException):
        return error.message
    return str(error)
