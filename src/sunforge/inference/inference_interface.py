from abc import ABCMeta, abstractmethod
from typing import Any, Optional

from sunforge.models.inspection.inspection_request import InspectionRequest


class InferenceInterface(metaclass=ABCMeta):
    """Interface to a hosted multimodal model used for panel inspection."""

    @abstractmethod
    def infer(self, request: InspectionRequest) -> Optional[Any]:
        """Send the image and instruction to the model and return its structured output.

        Parameters
        ----------
        request : InspectionRequest
            The image payload, the instruction text and the required output schema.

        Returns
        -------
        Optional[Any]
            The structured output as a dict, a JSON string or an InspectionResult.
            None if the model did not produce any structured output.

        Raises
        ------
        Exception
            Any transport or model level failure. The message of the exception is
            used to classify the failure, so it should be passed on unaltered.

        """
        raise NotImplementedError
