from __future__ import annotations

import asyncio

from appboot import create_app
from appboot.runtime.lifecycle import serve
from appboot.runtime.signals import SignalShutdown


def main() -> int:
    shutdown = SignalShutdown()
    app = create_app(__file__, shutdown_trigger=shutdown)
    return asyncio.run(serve(app, shutdown))


if __name__ == "__main__":
    raise SystemExit(main())
