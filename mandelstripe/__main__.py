from mandelstripe.cli import main

raise SystemExit(main())
