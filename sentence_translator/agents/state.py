from typing import Dict, List, Optional, TypedDict

from sentence_translator.models import Sentence


class BatchState(TypedDict):
    """
    Represents the state of the translation workflow for a single batch.
    """
    batch_index: int
    batch: List[Sentence]     # eligible source sentences of this batch
    needed: List[Sentence]    # subset still lacking a translation

    # Request / response
    user_variables: Dict[str, object]
    response: Optional[str]
    error: Optional[str]

    # Outputs
    new_terms: Dict[str, str]
    translated_count: int
