"""Downloadable exports: the site list as text and batch reports as CSV."""

import csv
import io

from spvm.schemas.batch import BatchReport

SITES_EXPORT_FILENAME = "sharepoint-sites-list.txt"

REPORT_CSV_HEADER = "Site URL,Status,Bibliotecas OK,Bibliotecas Erro,Erro"
STATUS_SUCCESS = "Sucesso"
STATUS_FAILURE = "Falha"


def report_filename(report: BatchReport) -> str:
    """File name of a report's CSV export, dated by the report timestamp."""
    return f"sharepoint-report-{report.timestamp.date().isoformat()}.csv"


def report_to_csv(report: BatchReport) -> str:
    """Render one report as CSV, one row per site in processing order.

    Text columns are quoted; library counts are written bare.
    """
    buffer = io.StringIO()
    buffer.write(REPORT_CSV_HEADER + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for result in report.results:
        writer.writerow(
            [
                result.site,
                STATUS_SUCCESS if result.succeeded else STATUS_FAILURE,
                result.libraries_configured,
                result.libraries_failed,
                result.error or "",
            ]
        )
    return buffer.getvalue().rstrip("\n")
