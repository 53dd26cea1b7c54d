"""Run howfast from Python instead of the CLI.

Equivalent to:

    howfast -u http://localhost:8080/ -r 100 -s
"""

from __future__ import annotations

from howfast import LoadRunner, RunConfiguration
from howfast.metrics.aggregator import format_summary_line

config = RunConfiguration(url="http://localhost:8080/", runs=100, silent=True)
report = LoadRunner(config).run()

for line in report.lines:
    print(line)
print(format_summary_line(report.summary))
