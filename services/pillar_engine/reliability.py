import json
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

import numpy as np
import pandas as pd

from .registry import PillarRegistry, get_default_registry

logger = logging.getLogger(__name__)

DEFAULT_ALPHA_THRESHOLD = 0.7


def calculate_cronbach_alpha(data: pd.DataFrame) -> float:
    """
    Calculates Cronbach's alpha for a set of items.
    Assumes data is a DataFrame where rows are respondents and columns are items.
    """
    if data.shape[1] < 2:
        return np.nan

    item_variances = data.var(axis=0, ddof=1).sum()
    total_variance = data.sum(axis=1).var(ddof=1)
    n_items = data.shape[1]

    if total_variance == 0:
        return 1.0 if item_variances == 0 else 0.0

    return (n_items / (n_items - 1)) * (1 - (item_variances / total_variance))


def _convert_numpy_types(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _convert_numpy_types(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_numpy_types(i) for i in obj]
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        obj = float(obj)
    if isinstance(obj, float) and np.isnan(obj):
        return None
    return obj


def generate_reliability_report(
    answer_maps: Iterable[Mapping[str, Any]],
    registry: Optional[PillarRegistry] = None,
    alpha_threshold: float = DEFAULT_ALPHA_THRESHOLD,
) -> Dict[str, Any]:
    """
    Internal consistency of each pillar's slider items over a batch of answer maps.

    Respondents missing any slider of a pillar are left out of that pillar's
    alpha. Pillars with fewer than two complete respondents or two items get
    an alpha of None and fail.

    Returns:
        A JSON-serializable report with per-pillar alpha, pass flag and item
        statistics, plus an overall pass flag.
    """
    registry = registry or get_default_registry()
    responses_df = pd.DataFrame(list(answer_maps))
    report: Dict[str, Any] = {
        "cronbach_alpha_threshold": alpha_threshold,
        "respondent_count": int(responses_df.shape[0]),
        "pillars": {},
        "overall_pass": True,
    }

    for definition in registry.definitions():
        item_keys = [q.key for q in definition.questions_of_type('slider')]
        present = [key for key in item_keys if key in responses_df.columns]

        if present:
            pillar_data = responses_df[present].apply(pd.to_numeric, errors='coerce').dropna()
        else:
            pillar_data = pd.DataFrame()

        if pillar_data.shape[0] < 2 or pillar_data.shape[1] < 2:
            alpha = np.nan
        else:
            alpha = calculate_cronbach_alpha(pillar_data)
        is_pass = bool(not np.isnan(alpha) and alpha >= alpha_threshold)

        item_stats = {
            key: {
                "mean": pillar_data[key].mean(),
                "stddev": pillar_data[key].std(ddof=1),
                "min": pillar_data[key].min(),
                "max": pillar_data[key].max(),
            }
            for key in present
        } if not pillar_data.empty else {}

        report["pillars"][definition.key] = {
            "name": definition.name,
            "cronbach_alpha": alpha,
            "pass": is_pass,
            "item_count": len(present),
            "respondent_count_for_alpha": int(pillar_data.shape[0]),
            "item_statistics": item_stats,
        }
        if not is_pass:
            report["overall_pass"] = False
        logger.debug(f"Reliability for '{definition.key}': alpha={alpha}, pass={is_pass}")

    return _convert_numpy_types(report)


if __name__ == '__main__':
    import argparse

    from .core.config import settings

    parser = argparse.ArgumentParser(description="Generate Pillar Reliability Report")
    parser.add_argument("responses", type=str, help="JSON file with a list of answer maps.")
    parser.add_argument("--threshold", type=float, default=settings.reliability_alpha_threshold)
    args = parser.parse_args()

    with open(args.responses, 'r', encoding='utf-8') as f:
        responses = json.load(f)

    registry = PillarRegistry.from_file(settings.definitions_path)
    print(json.dumps(generate_reliability_report(responses, registry, args.threshold), indent=2))
