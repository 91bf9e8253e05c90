from intact_http.core.dependency_container import DependencyContainer
from intact_http.core.transaction import Transaction
from intact_http.stages.response_stage import ResponseStage


class NoopStage(ResponseStage):
    """A stage that does nothing.

    It never touches the response body, so it can sit anywhere in a pipeline.
    """

    async def apply(self, transaction: Transaction, container: DependencyContainer) -> Transaction:
        return transaction
