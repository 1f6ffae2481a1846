"""Command-line interface for cmdgate.

Provides the main entry point for serving the execution gateway or the
router, running a single command through the gateway logic locally, and
probing a running gateway.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

PROBE_COMMANDS = [
    ("System Information", "uname -a"),
    ("List Files", "ls -la /tmp"),
    ("Current Date", "date"),
    ("Disk Usage", "df -h"),
    ("Memory Info", "free -h"),
    ("Network Interfaces", "ip addr show"),
    ("Process List", "ps aux"),
    ("Python Version", "python3 --version"),
    ("Create and List Test File", "echo 'Hello from Linux container!' > /tmp/test.txt && cat /tmp/test.txt"),
]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="cmdgate",
        description="Denylist-gated command gateway and instance-pool router",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/cmdgate.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("gateway", help="Serve the execution gateway")
    subparsers.add_parser("router", help="Serve the front-door router")

    exec_parser = subparsers.add_parser(
        "exec", help="Run one command through the gateway logic and print the response",
    )
    exec_parser.add_argument("cmdline", help="Shell command to run")

    probe_parser = subparsers.add_parser(
        "probe", help="Health-check a running gateway and run sample commands",
    )
    probe_parser.add_argument(
        "--url", default="http://localhost:8081",
        help="Gateway base URL (default: http://localhost:8081)",
    )

    return parser.parse_args(argv)


async def _exec(settings, cmdline: str) -> int:
    """Run one command through validator + executor and print the JSON body."""
    from cmdgate.executor.denylist import CommandValidator
    from cmdgate.executor.subprocess_runner import SubprocessExecutor
    from cmdgate.gateway.handler import ExecutionGateway

    ex = settings.executor
    gateway = ExecutionGateway(
        executor=SubprocessExecutor(working_dir=ex.working_dir, timeout=ex.timeout),
        validator=CommandValidator(ex.denylist),
    )
    response = await gateway.handle({"command": cmdline})
    print(response.model_dump_json(exclude_none=True, indent=2))
    return 0 if response.success else 1


async def _probe(base_url: str) -> int:
    """Health-check a gateway, then send each sample command to /run."""
    import httpx

    base_url = base_url.rstrip("/")
    async with httpx.AsyncClient(base_url=base_url, timeout=60.0) as client:
        print(f"Probing gateway at {base_url}\n")
        try:
            r = await client.get("/")
            r.raise_for_status()
            health = r.json()
        except (httpx.HTTPError, ValueError) as e:
            print(f"Health check failed: {e}")
            print("Skipping command tests")
            return 1

        ts = datetime.fromtimestamp(health.get("timestamp", 0), tz=timezone.utc)
        print(f"Status:    {health.get('status')}")
        print(f"Timestamp: {ts.isoformat()}")
        print("-" * 50)

        failures = 0
        for name, command in PROBE_COMMANDS:
            print(f"{name}")
            print(f"Command: {command}")
            try:
                r = await client.post("/run", json={"command": command})
                result = r.json()
            except (httpx.HTTPError, ValueError) as e:
                failures += 1
                print(f"Request failed: {e}")
                print("-" * 50)
                continue

            if result.get("success"):
                if result.get("output"):
                    print(f"Output:\n{result['output']}")
                if result.get("error"):
                    print(f"Stderr:\n{result['error']}")
                print(f"Exit code: {result.get('exit_code')}")
            else:
                failures += 1
                print(f"Rejected: {result.get('error')}")
            print("-" * 50)

    return 1 if failures else 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the cmdgate CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from cmdgate.config.settings import load_settings
    from cmdgate.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "gateway":
        from cmdgate.gateway.server import create_app
        import uvicorn
        gw = settings.gateway
        ex = settings.executor
        app = create_app(
            working_dir=ex.working_dir,
            timeout=ex.timeout,
            denylist=ex.denylist,
            cors_origins=gw.cors_origins,
        )
        logger.info("Linux Command Server starting on port %d", gw.port)
        uvicorn.run(
            app,
            host=gw.host,
            port=gw.port,
            timeout_graceful_shutdown=gw.shutdown_timeout,
        )

    elif args.command == "router":
        from cmdgate.router.server import build_app
        import uvicorn
        rt = settings.router
        app = build_app(settings)
        logger.info("Router starting on port %d", rt.port)
        uvicorn.run(
            app,
            host=rt.host,
            port=rt.port,
            timeout_graceful_shutdown=rt.shutdown_timeout,
        )

    elif args.command == "exec":
        raise SystemExit(asyncio.run(_exec(settings, args.cmdline)))

    elif args.command == "probe":
        raise SystemExit(asyncio.run(_probe(args.url)))


if __name__ == "__main__":
    main()
