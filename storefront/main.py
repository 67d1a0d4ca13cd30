# storefront/main.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.auth_utils import create_access_token, fetch_user, hash_password, verify_password
from storefront.config import Settings, get_settings
from storefront.db.database import create_engine, create_sessionmaker, get_db
from storefront.db.functions import (
    add_item_to_cart,
    create_product,
    create_user,
    delete_product,
    get_all_products,
    get_cart,
    get_user_by_email,
    remove_item_from_cart,
)
from storefront.db.init_db import init_db
from storefront.db.schemas import (
    CartItemRequest,
    ImageUpload,
    LoginRequest,
    Product as ProductSchema,
    ProductBase,
    ProductRemove,
    SignupRequest,
)
from storefront.errors import StorefrontError, storefront_error_handler
from storefront.media import MediaGateway, create_media_gateway, get_media_gateway

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        engine = create_engine(settings.database_url, echo=settings.sql_echo)
        await init_db(engine)
        app.state.sessionmaker = create_sessionmaker(engine)
        app.state.media_gateway = create_media_gateway(settings)
        logger.info("storefront started")
        try:
            yield
        finally:
            await app.state.media_gateway.aclose()
            await engine.dispose()
            logger.info("storefront stopped")

    app = FastAPI(title="Storefront API", lifespan=lifespan)
    app.state.settings = settings
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_routes(app)
    return app


def register_routes(app: FastAPI):
    settings: Settings = app.state.settings

    @app.get("/", response_class=PlainTextResponse)
    async def health_check():
        """Health check endpoint."""
        return "Storefront API is running"

    # ---------------------- Media ----------------------

    @app.post("/upload")
    async def upload_image(payload: ImageUpload, media: MediaGateway = Depends(get_media_gateway)):
        try:
            image_url = await media.upload(payload.image)
        except Exception:
            logger.exception("Image upload error")
            return JSONResponse(status_code=500, content={"success": False, "message": "Image upload failed"})
        return {"success": True, "image_url": image_url}

    # ---------------------- Catalog ----------------------

    @app.post("/addproduct")
    async def add_product(product: ProductBase, db: AsyncSession = Depends(get_db)):
        new_product = await create_product(
            db,
            name=product.name,
            image=product.image,
            category=product.category,
            new_price=product.new_price,
            old_price=product.old_price,
        )
        logger.debug("add_product: id=%s name=%s", new_product.id, new_product.name)
        return {"success": True, "name": product.name}

    @app.post("/removeproduct")
    async def remove_product(payload: ProductRemove, db: AsyncSession = Depends(get_db)):
        deleted = await delete_product(db, payload.id)
        logger.debug("remove_product: id=%s found=%s", payload.id, deleted is not None)
        return {"success": True, "name": deleted.name if deleted else payload.name}

    @app.get("/allproducts", response_model=List[ProductSchema])
    async def all_products(db: AsyncSession = Depends(get_db)):
        return await get_all_products(db)

    # ---------------------- Accounts ----------------------

    @app.post("/signup")
    async def signup(payload: SignupRequest, db: AsyncSession = Depends(get_db)):
        user = await create_user(
            db,
            name=payload.name,
            email=payload.email,
            hashed_password=hash_password(payload.password),
        )
        logger.debug("signup: user_id=%s", user.id)
        return {"success": True, "token": create_access_token(user.id, settings)}

    @app.post("/login")
    async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
        user = await get_user_by_email(db, payload.email)
        if user and verify_password(payload.password, user.hashed_password):
            return {"success": True, "token": create_access_token(user.id, settings)}
        return {"success": False, "errors": "Invalid email or password"}

    # ---------------------- Cart ----------------------

    @app.post("/addtocart", response_class=PlainTextResponse)
    async def add_to_cart(item: CartItemRequest, user_id: int = Depends(fetch_user), db: AsyncSession = Depends(get_db)):
        await add_item_to_cart(db, user_id, item.item_id)
        logger.debug("add_to_cart: user_id=%s item_id=%s", user_id, item.item_id)
        return "Added to cart"

    @app.post("/removefromcart", response_class=PlainTextResponse)
    async def remove_from_cart(item: CartItemRequest, user_id: int = Depends(fetch_user), db: AsyncSession = Depends(get_db)):
        await remove_item_from_cart(db, user_id, item.item_id)
        logger.debug("remove_from_cart: user_id=%s item_id=%s", user_id, item.item_id)
        return "Removed from cart"

    @app.post("/getcart")
    async def read_cart(user_id: int = Depends(fetch_user), db: AsyncSession = Depends(get_db)):
        return await get_cart(db, user_id)


app = create_app()


def run():
    import uvicorn

    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
