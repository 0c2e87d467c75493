from neo4j import AsyncDriver, AsyncGraphDatabase

from payment_blocks.config import Settings


class DatabaseManager:
    """Manager for a Neo4j database connection.

    One instance is created at application startup, shared by everything that
    needs the database, and closed on shutdown.

    Attributes:
        _driver: The Neo4j async driver instance, created on first use
        _uri: URI of the Neo4j database
        _auth: Tuple of username and password for authentication
        _database: Name of the Neo4j database to connect to
    """

    def __init__(
        self,
        uri: str,
        auth: tuple[str, str],
        database: str = "",
        max_connection_pool_size: int = 10,
        connection_timeout: float = 30.0,
    ) -> None:
        self._driver: AsyncDriver | None = None
        self._uri = uri
        self._auth = auth
        self._database = database
        self._max_connection_pool_size = max_connection_pool_size
        self._connection_timeout = connection_timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabaseManager":
        return cls(
            uri=settings.neo4j_uri,
            auth=(settings.neo4j_user, settings.neo4j_password),
            database=settings.neo4j_database,
        )

    async def verify_connectivity(self) -> None:
        """Verify database connectivity with current credentials.

        Raises:
            neo4j.exceptions.ServiceUnavailable: If database is not reachable
            neo4j.exceptions.AuthError: If credentials are invalid
        """
        await self.driver.verify_connectivity()

    @property
    def driver(self) -> AsyncDriver:
        """Get or create the Neo4j driver instance.

        Returns:
            The Neo4j driver instance that can be used for database operations
        """
        if not self._driver:
            self._driver = AsyncGraphDatabase.driver(
                self._uri,
                auth=self._auth,
                max_connection_pool_size=self._max_connection_pool_size,
                connection_timeout=self._connection_timeout,
            )
        return self._driver

    @property
    def database(self) -> str | None:
        """Name of the Neo4j database, or None for the server default."""
        return self._database or None

    async def close(self) -> None:
        """Close the database connection.

        If no connection exists, this is a no-op.
        """
        if self._driver:
            await self._driver.close()
            self._driver = None
