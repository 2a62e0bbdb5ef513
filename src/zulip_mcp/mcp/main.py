import argparse
import logging
import sys

import anyio

from zulip_mcp.errors import MissingCredentials
from zulip_mcp.mcp.server import TRANSPORTS
from zulip_mcp.mcp.server import serve_workspace
from zulip_mcp.zulip import credentials_from_environment


MISSING_CREDENTIALS_MESSAGE = (
    'Please set ZULIP_EMAIL, ZULIP_API_KEY, and ZULIP_URL environment variables\n'
)


def configure_logging(log_level):
    # stdout carries the protocol, so logs go to stderr.
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, log_level),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def run_application(argv=None):
    parser = argparse.ArgumentParser(
        description='Run the Zulip MCP server.'
    )
    parser.add_argument(
        '--transport',
        default='stdio',
        choices=sorted(TRANSPORTS),
        help='MCP transport type.',
    )
    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level for messages written to stderr.',
    )
    arguments = parser.parse_args(argv)
    configure_logging(arguments.log_level)

    try:
        credentials = credentials_from_environment()
    except MissingCredentials as error:
        logging.getLogger(__name__).debug('%s', error)
        parser.exit(1, MISSING_CREDENTIALS_MESSAGE)

    logging.getLogger(__name__).info('Starting Zulip MCP Server...')
    try:
        anyio.run(serve_workspace, credentials, arguments.transport)
    except Exception:
        logging.getLogger(__name__).exception('Fatal error in Zulip MCP Server')
        sys.exit(1)


if __name__ == '__main__':
    run_application()
