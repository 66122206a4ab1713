import sqlalchemy

metadata = sqlalchemy.MetaData()

# Owned by the contract deployment script. Declared here so the foreign key
# below resolves; never created by the portal.
deployed_contracts = sqlalchemy.Table(
    "deployed_contracts",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("contract_name", sqlalchemy.String(255), nullable=False),
    sqlalchemy.Column("address", sqlalchemy.String(255), nullable=False),
    sqlalchemy.Column("abi", sqlalchemy.Text),
    sqlalchemy.Column("bytecode", sqlalchemy.Text),
    sqlalchemy.Column(
        "deployed_at",
        sqlalchemy.DateTime(timezone=True),
        server_default=sqlalchemy.func.now(),
    ),
    sqlalchemy.Column("status", sqlalchemy.String(64)),
    sqlalchemy.Column("chain_id", sqlalchemy.Integer, nullable=False),
    sqlalchemy.Column("compiler_version", sqlalchemy.String(64)),
)

agent_deployed_games = sqlalchemy.Table(
    "agent_deployed_games",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column(
        "factory_deployment_id",
        sqlalchemy.Integer,
        sqlalchemy.ForeignKey("deployed_contracts.id"),
        nullable=False,
    ),
    sqlalchemy.Column("game_id_on_chain", sqlalchemy.Integer, nullable=False),
    sqlalchemy.Column("game_address", sqlalchemy.String(255), nullable=False),
    sqlalchemy.Column("agent_id", sqlalchemy.String(255), nullable=False),
    sqlalchemy.Column("deployed_by_address", sqlalchemy.String(255), nullable=False),
    sqlalchemy.Column(
        "transaction_hash", sqlalchemy.String(255), nullable=False, unique=True
    ),
    sqlalchemy.Column(
        "deployed_at",
        sqlalchemy.DateTime(timezone=True),
        nullable=False,
        server_default=sqlalchemy.func.now(),
    ),
    sqlalchemy.Column(
        "categories", sqlalchemy.Text, nullable=False, server_default=""
    ),
)
