"""Run the shell with ``python -m timbee``."""

from timbee.repl import main

raise SystemExit(main())
