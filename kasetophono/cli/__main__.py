"""Allow ``python -m kasetophono.cli`` execution (runs the crawl CLI)."""

from kasetophono.cli.crawl import main

main()
