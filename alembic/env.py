from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

from config import settings

# Alembic Config
config = context.config

# La URL sale de Settings (.env / variables de entorno), ya normalizada
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

# Logging desde alembic.ini
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

from db.database import Base  # noqa: E402
from db import models as _models  # noqa: F401,E402

target_metadata = Base.metadata


def include_object(object, name, type_, reflected, compare_to):
    """Excluir la tabla de control de Alembic del autogenerate."""
    if type_ == "table" and name == "alembic_version":
        return False
    return True


def run_migrations_offline() -> None:
    """Modo 'offline': genera SQL sin conectarse al motor."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
        include_object=include_object,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Modo 'online': aplica migraciones contra una conexión real."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        future=True,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
            # SQLite no soporta ALTER TABLE completo
            render_as_batch=connection.dialect.name == "sqlite",
            include_object=include_object,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
