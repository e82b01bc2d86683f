from __future__ import annotations

from appboot.runtime.lifecycle import main


if __name__ == "__main__":
    raise SystemExit(main())
