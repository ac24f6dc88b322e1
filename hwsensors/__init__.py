"""Hardware sensor discovery, configuration parsing, threshold alarms and airflow calculation."""

__version__ = "0.1.0"