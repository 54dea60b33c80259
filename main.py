#!/usr/bin/env python
"""Main entry point for the NBA Mock Service."""

import argparse
import json
import os
import sys
from pathlib import Path

# Add the repository root to path
sys.path.insert(0, str(Path(__file__).parent))

from loguru import logger


def setup_logging(log_file="logs/mock_service.log"):
    """Configure the stderr and rotating file sinks."""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level="INFO"
    )
    logger.add(
        log_file,
        rotation="100 MB",
        retention="7 days",
        level="DEBUG"
    )


def start_api_server(host=None, port=None):
    """Start the FastAPI server."""
    logger.info("Starting API server...")
    from mock_service.serving import run_server
    run_server(host=host, port=port)


def show_services(services_dir=None):
    """Discover services and print the registry."""
    from mock_service.serving import MockService

    service = MockService(services_dir=services_dir)
    service.initialize()

    for info in service.registry.list_services():
        methods = ", ".join(info["methods"]) or "-"
        print(f"{info['name']:<30} {methods}")

    for info in service.registry.list_services():
        for method in info["methods"]:
            entry = service.registry.get_entry(info["name"], method)
            if entry.route is not None:
                transform = entry.transform_key or "passthrough"
                print(f"  {method} {entry.route.pattern} -> {transform}")


def render(service_name, method="GET", raw_params=None, seed=None, services_dir=None):
    """Dispatch a single request offline and print the resulting JSON.

    Args:
        service_name: Registered service name
        method: HTTP method
        raw_params: ``key=value`` strings
        seed: Random seed for reproducible output
        services_dir: Services directory override

    Returns:
        Process exit code
    """
    from mock_service.engine import MockServiceError
    from mock_service.serving import MockService

    params = {}
    for item in raw_params or []:
        if "=" not in item:
            logger.error(f"Parameters must be key=value, got '{item}'")
            return 2
        key, value = item.split("=", 1)
        params[key] = value

    service = MockService(services_dir=services_dir, random_seed=seed)
    service.initialize()

    try:
        document = service.dispatcher.dispatch(service_name, method, params)
    except MockServiceError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(json.dumps({"success": False, "error": e.message}, ensure_ascii=False, indent=2))
        return 1

    print(json.dumps(document, ensure_ascii=False, indent=2))
    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="NBA Mock Service CLI"
    )
    parser.add_argument(
        "--services-dir", default=None, help="Services directory (overrides config)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--host", default=None, help="Host to bind the server to")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to run server on")

    # Services command
    subparsers.add_parser("services", help="List discovered services and routes")

    # Render command
    render_parser = subparsers.add_parser("render", help="Render one mock response offline")
    render_parser.add_argument("service", help="Service name")
    render_parser.add_argument("--method", default="GET", help="HTTP method")
    render_parser.add_argument(
        "--param", action="append", default=[], help="Request parameter as key=value"
    )
    render_parser.add_argument("--seed", type=int, default=None, help="Random seed")

    # Parse arguments
    args = parser.parse_args()

    setup_logging()

    if args.services_dir:
        os.environ["MOCK_SERVICES_DIR"] = args.services_dir
        logger.info(f"Using services directory {args.services_dir}")

    # Execute command
    if args.command == "serve":
        start_api_server(args.host, args.port)
    elif args.command == "services":
        show_services(args.services_dir)
    elif args.command == "render":
        sys.exit(render(args.service, args.method, args.param, args.seed, args.services_dir))
    else:
        parser.print_help()

        print("\n" + "="*50)
        print("QUICK START GUIDE")
        print("="*50)
        print("\n1. List services:")
        print("   python main.py services")
        print("\n2. Render a route plan offline:")
        print("   python main.py render plan_de_ruta --param ruta_id=P-0007 --param fecha=2025-06-02")
        print("\n3. Start API server:")
        print("   python main.py serve --port 8080")
        print("\n" + "="*50)


if __name__ == "__main__":
    main()
