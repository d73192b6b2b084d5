import argparse

from primus.helpers.config_helper import ConfigHelper
from primus.helpers.logging_helper import initialize_logging, log_info


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Primus Character Creator API server")
    parser.add_argument("--config", help="path to the INI configuration file")
    parser.add_argument("--host", help="interface to bind (default from [Server] host)")
    parser.add_argument("--port", type=int, help="port to listen on (default from [Server] port)")
    parser.add_argument("--debug", action="store_true", default=None, help="enable the Flask debugger")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    if args.config:
        ConfigHelper.load_config(args.config)
    initialize_logging()
    log_info("Starting Primus Character Creator", func_name="app.main")

    from primus.web.server import run_server

    run_server(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
