# =============================================================================
# kasetophono/cli/__init__.py
# =============================================================================
#
# Command-line tools that work without the web server.  Run them as
# modules:
#
#     python -m kasetophono.cli.crawl build       # crawl -> snapshot file
#     python -m kasetophono.cli.crawl categories  # category tree
#     python -m kasetophono.cli.crawl summary     # snapshot statistics
#
# Modules use argparse and defer heavier imports into their handlers so
# that `--help` stays fast.  Settings come from the environment / .env,
# the same as for the server.
# =============================================================================
