from weatherfeed.cli import main

raise SystemExit(main())
