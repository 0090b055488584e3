from typing import Iterable

from carefund.domain.models import DataQuality, QualityGrade, SourceTag
from carefund.domain.indicators.rounding import round_half_up


def grade_for(real_time_percentage: float) -> QualityGrade:
    if real_time_percentage >= 75:
        return QualityGrade.EXCELLENT
    if real_time_percentage >= 50:
        return QualityGrade.GOOD
    if real_time_percentage >= 25:
        return QualityGrade.FAIR
    return QualityGrade.POOR


def assess_data_quality(
    quality_inputs: Iterable[SourceTag],
    labelled_sources: Iterable[SourceTag],
) -> DataQuality:
    """
    Grade a collection pass by how much of it came from live sources.

    Args:
        quality_inputs: tags counted towards the real-time fraction
        labelled_sources: tags whose distinct labels make up source_count

    Returns:
        DataQuality with percentage in [0, 100]
    """
    inputs = list(quality_inputs)
    if not inputs:
        return DataQuality(overall=QualityGrade.POOR, source_count=0, real_time_data_percentage=0)

    live_count = sum(1 for tag in inputs if tag.live)
    percentage = live_count / len(inputs) * 100
    source_count = len({tag.label for tag in labelled_sources})

    return DataQuality(
        overall=grade_for(percentage),
        source_count=source_count,
        real_time_data_percentage=round_half_up(percentage),
    )
