from buildtree.cli import main

raise SystemExit(main())
