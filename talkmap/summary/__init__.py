"""Meeting summary persistence."""
from .writer import NoOpSummaryWriter, SummaryWriter, SummaryWriterBase, create_summary_writer

__all__ = ["NoOpSummaryWriter", "SummaryWriter", "SummaryWriterBase", "create_summary_writer"]
