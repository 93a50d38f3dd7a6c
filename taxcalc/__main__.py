from taxcalc.cli import main

raise SystemExit(main())
