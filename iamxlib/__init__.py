"""
iamxlib — library modules behind the IAMExport user export script.

config      — config.json singleton and the explicit ExportContext
aws_client  — profile-aware boto3 client factory and capability checks
artifacts   — depth-limited JSON artifact writer and filename builders
directory   — export directory creation and wipe
exporter    — user enumeration, per-user sub-exports and the orchestrator
"""
