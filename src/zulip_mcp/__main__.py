from zulip_mcp.mcp.main import run_application


if __name__ == '__main__':
    run_application()
