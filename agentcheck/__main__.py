from agentcheck.run_agent import main

raise SystemExit(main())
