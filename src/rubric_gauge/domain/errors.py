"""
Domain Errors

Exception hierarchy shared by the grading protocol, model clients, dataset
loader and run-state reducer.
"""


class RubricGaugeError(Exception):
    """Base class for rubric-gauge errors"""
    pass


class GraderReplyError(RubricGaugeError):
    """The grader's reply could not be parsed into a verdict"""
    pass


class EmptyResponseError(RubricGaugeError):
    """A provider returned a response without any content"""
    pass


class InvalidTransitionError(RubricGaugeError):
    """A run-state event would move the run phase backwards"""
    pass


class DatasetError(RubricGaugeError):
    """Unknown dataset or the dataset could not be fetched"""
    pass
