"""Desktop entry point.

Configuration and client construction are validated before any window is
created; a failure there prints to stderr and exits with status 1.
"""

import argparse
import sys
from typing import Optional, Sequence

from chatdesk_core.api.context import AppContext, build_context
from chatdesk_core.config.settings import load_settings
from chatdesk_core.domain.exceptions import BusinessError
from chatdesk_core.infrastructure.logging.logger import logger, setup_logger


def bootstrap(config_file: Optional[str] = None) -> AppContext:
    """加载配置、挂载日志、校验客户端可创建，返回应用上下文。"""

    settings = load_settings(config_file)
    setup_logger(settings)
    ctx = build_context(settings)
    client = ctx.client_factory()
    logger.info("ChatDesk starting", extra={"extra": {"provider": client.name}})
    return ctx


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="chatdesk", description="Desktop chat assistant")
    parser.add_argument("--config", help="path to a YAML/JSON settings file")
    args = parser.parse_args(argv)
    try:
        ctx = bootstrap(args.config)
    except BusinessError as e:
        print(f"Failed to load configuration: {e.message}", file=sys.stderr)
        return 1

    from chatdesk_core.gui.app import run_app

    run_app(ctx)
    return 0


if __name__ == "__main__":
    sys.exit(main())
