"""Command implementations, one module per subcommand with a run(args) entry point."""
