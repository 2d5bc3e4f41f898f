"""COVID-19 country report generator.

Fetches statistics from disease.sh, merges local annotations and writes a
paginated PDF report.  See :mod:`covid_report.report.assembler`.
"""

__version__ = "1.0.0"
