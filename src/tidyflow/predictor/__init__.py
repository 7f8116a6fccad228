from .request import PredictRequest, PredictResponse

__all__ = ["PredictRequest", "PredictResponse"]
