import asyncio
import logging
from contextlib import asynccontextmanager

from dishka import make_async_container
from dishka.integrations.fastapi import setup_dishka
from fastapi import FastAPI
import uvicorn

from messagely.config import Config, load_config
from messagely.providers.app import AdaptersProvider, GatewaysProvider, ServicesProvider
from messagely.services import AuthAPI, UserAPI, MessageAPI, register_error_handlers

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.dishka_container.close()

async def create_app(config: Config | None = None):
    container = make_async_container(
        AdaptersProvider(config),
        GatewaysProvider(),
        ServicesProvider(),
    )

    app = FastAPI(title="messagely", lifespan=lifespan)
    setup_dishka(container, app)
    register_error_handlers(app)

    auth_api = await container.get(AuthAPI)
    user_api = await container.get(UserAPI)
    message_api = await container.get(MessageAPI)

    app.include_router(auth_api.get_router())
    app.include_router(user_api.get_router())
    app.include_router(message_api.get_router())

    return app

def main():
    config = load_config(".env")
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    app = asyncio.run(create_app(config))
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level=config.log_level.lower())

if __name__ == "__main__":
    main()
