from aidex.cli import main

raise SystemExit(main())
