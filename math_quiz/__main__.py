from __future__ import annotations

import logging

from .app import run


def main() -> int:
    """Open the quiz window; used by ``python -m math_quiz`` and ``math-quiz``."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
