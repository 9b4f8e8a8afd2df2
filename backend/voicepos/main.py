import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from voicepos import __version__
from voicepos.api import auth, customers, imports, orders, pos, products, reports, voice
from voicepos.api import settings as settings_api
from voicepos.api import users as users_api
from voicepos.core.config import Settings, settings as default_settings
from voicepos.pos.cart import TaxTable
from voicepos.pos.gateway import MockPaymentGateway, PaymentGateway
from voicepos.pos.session import SessionRegistry
from voicepos.schemas.common import PaymentMethod
from voicepos.services.documents import PdfDocumentSink
from voicepos.services.users import UserDirectory
from voicepos.store import CatalogStore, SqlCatalogStore, build_store

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(
    config: Settings | None = None,
    store: CatalogStore | None = None,
    gateway: PaymentGateway | None = None,
    users: UserDirectory | None = None,
) -> FastAPI:
    """Build the API; a missing ``store`` is created from config at startup."""
    config = config or default_settings
    configure_logging(config.LOG_LEVEL)

    tax_table = TaxTable(config.DEFAULT_TAX_RATE, config.STORE_TAX_RATES)
    payment_methods = [PaymentMethod(**m) for m in config.PAYMENT_METHODS]
    documents = PdfDocumentSink(store_name=config.STORE_NAME, currency=config.CURRENCY_SYMBOL)
    gateway = gateway or MockPaymentGateway(config.PAYMENT_PROCESSING_DELAY)

    def attach_store(app: FastAPI, catalog: CatalogStore) -> None:
        app.state.store = catalog
        app.state.sessions = SessionRegistry(
            store=catalog,
            gateway=gateway,
            documents=documents,
            tax_table=tax_table,
            payment_methods=payment_methods,
            default_payment_method=config.DEFAULT_PAYMENT_METHOD,
            credit_payment_method=config.CREDIT_PAYMENT_METHOD,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.store is None:
            attach_store(app, await build_store(config))
        logger.info("%s started (%s catalog)", config.PROJECT_NAME, config.CATALOG_BACKEND)
        yield
        app.state.sessions.close_all()
        if isinstance(app.state.store, SqlCatalogStore):
            await app.state.store.close()

    app = FastAPI(
        title=config.PROJECT_NAME,
        description="Voice-enabled point of sale: catalog, cart, checkout and voice commands",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS - restrict in production via env
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.store = None
    app.state.tax_table = tax_table
    app.state.payment_methods = payment_methods
    app.state.documents = documents
    app.state.users = users or UserDirectory()
    app.state.voice_contexts = {}
    if store is not None:
        attach_store(app, store)

    # Routers
    for module in (auth, users_api, products, customers, orders, pos, voice, reports, settings_api, imports):
        app.include_router(module.router, prefix=API_PREFIX)

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
