"""
Table definitions for job runs and recorded step outputs.

Unlike a reflected schema these tables are owned by the application and
created on startup with metadata.create_all().
"""

from sqlalchemy import JSON, Column, Integer, MetaData, String, Table, Text, UniqueConstraint

metadata = MetaData()

job_runs = Table(
    "job_runs",
    metadata,
    Column("run_id", String(64), primary_key=True),
    Column("function_id", String(128), nullable=False),
    Column("event_id", String(64), nullable=False),
    Column("event_name", String(128), nullable=False),
    Column("event_data", JSON, nullable=False),
    Column("event_ts", String(40), nullable=False),
    Column("status", String(16), nullable=False),
    Column("attempts", Integer, nullable=False, default=0),
    Column("error", Text),
    Column("output", JSON),
    Column("created_at", String(40), nullable=False),
    Column("updated_at", String(40), nullable=False),
)

step_results = Table(
    "step_results",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("run_id", String(64), nullable=False, index=True),
    Column("step_name", String(128), nullable=False),
    Column("output", JSON),
    Column("created_at", String(40), nullable=False),
    UniqueConstraint("run_id", "step_name", name="uq_step_results_run_step"),
)
