from nextcrud.cli import main

raise SystemExit(main())
