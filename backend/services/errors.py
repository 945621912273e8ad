"""
Service exceptions
"""


class NoticeServiceError(Exception):
    """Base class for notice service errors"""


class ContractCallError(NoticeServiceError):
    """A constant contract call was rejected by the node (revert, bad response)"""

    def __init__(self, function: str, message: str):
        self.function = function
        super().__init__(f"{function}: {message}")


class NoticeDataUnavailableError(NoticeServiceError):
    """Neither the backend nor the chain produced data and nothing is cached"""

    def __init__(self, server_address: str):
        self.server_address = server_address
        super().__init__(f"No notice data available for {server_address}")
