from railtrack.cli import main

raise SystemExit(main())
