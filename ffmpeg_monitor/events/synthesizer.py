"""
Combine extracted samples with run context into public events.

Synthesis is pure: it reads the context and never touches the process or the
filesystem.
"""

from ..models import (
    CompletedEvent,
    CompletionSample,
    ProgressEvent,
    ProgressSample,
    RunContext,
)


def synthesize_progress(sample: ProgressSample, context: RunContext) -> ProgressEvent:
    """
    Build a progress event for a run.

    Args:
        sample: Fields extracted from a progress line
        context: Context of the run the line belongs to

    Returns:
        ProgressEvent carrying the run's resolved total duration
    """
    return ProgressEvent(
        input_file=context.input_file,
        output_file=context.output_file,
        command_line=context.command_line,
        total_duration=context.total_duration,
        processed_duration=sample.processed_duration,
        frame=sample.frame,
        fps=sample.fps,
        size_kb=sample.size_kb,
        bitrate=sample.bitrate,
        speed=sample.speed,
    )


def synthesize_completion(sample: CompletionSample, context: RunContext) -> CompletedEvent:
    """
    Build a completion event for a run.

    A duration found on the completion line itself wins over the context's.

    Args:
        sample: Fields extracted from the muxing overhead line
        context: Context of the run the line belongs to

    Returns:
        CompletedEvent
    """
    total_duration = sample.total_duration or context.total_duration

    return CompletedEvent(
        input_file=context.input_file,
        output_file=context.output_file,
        command_line=context.command_line,
        total_duration=total_duration,
        muxing_overhead=sample.muxing_overhead,
    )
