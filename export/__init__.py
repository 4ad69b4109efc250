"""
Quarterly staff export pipeline.

This package contains every stage of the ShareNote → Gainsight export:

Modules:
    base: Abstract TransferClient interface for SFTP/FTP clients
    run_gate: Quarter-start run-date rule and artifact naming
    runner: StaffExportRunner, the orchestrator, and build_runner wiring
    scheduler: APScheduler integration for quarter-start execution

Subpackages:
    extractors: Staff query execution against the source database
    transformers: Column-name normalization and row mapping
    loaders: CSV rendering, upload with retries, Archive/Failed routing

Architecture:
    The export is a single linear pipeline:

    1. Gate - exit unless today is Jan 1, Apr 1, Jul 1 or Oct 1
    2. Fetch - run the staff procedure, map rows to StaffRecord
    3. Render - write the fixed-layout CSV atomically
    4. Transfer - upload with fixed-delay retries
    5. Route - move the CSV to Archive or Failed

    Only the transfer stage retries; any other failure ends the run.

Usage:
    from export.transformers.column_mapping import build_column_mapping
    from export.runner import build_runner

Example:
    mapping = build_column_mapping()
    runner = build_runner(mapping)
    result = await runner.execute()

    print(f"Export finished: {result['status']}")

Error Handling:
    All stages raise exceptions from core.exceptions. Unexpected errors are
    logged by the runner and re-raised to the host.
"""

__all__ = [
    "TransferClient",
    "StaffExportRunner",
    "ExportScheduler",
    "StaffExtractor",
    "ColumnMapping",
    "CsvRenderer",
    "RemoteTransferService",
    "FileRouter",
]
