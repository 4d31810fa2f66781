import logging

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from bookshop.application.ports import PasswordHasher, UnitOfWork
from bookshop.application.dto import ProductUpdateInput, ProfileUpdateInput, RegisterUserInput, UserOutput
from bookshop.application.use_cases.accounts import (
    AuthenticateUserUseCase,
    GetUserUseCase,
    RegisterUserUseCase,
    UpdateProfileUseCase,
)
from bookshop.application.use_cases.catalog import (
    CreateCategoryUseCase,
    CreateProductUseCase,
    DeleteProductUseCase,
    GetCategoryUseCase,
    GetProductWithDetailsUseCase,
    ListCategoriesUseCase,
    ListProductsByFlagUseCase,
    ListProductsUseCase,
    UpdateProductUseCase,
)
from bookshop.application.use_cases.reviews import CreateReviewUseCase, ListProductReviewsUseCase
from bookshop.application.use_cases.cart import (
    AddCartItemUseCase,
    ClearCartUseCase,
    GetCartWithItemsUseCase,
    GetOrCreateCartUseCase,
    RemoveCartItemUseCase,
    UpdateCartItemQuantityUseCase,
)
from bookshop.application.use_cases.orders import (
    GetOrderWithItemsUseCase,
    ListUserOrdersUseCase,
    PlaceOrderUseCase,
    UpdateOrderStatusUseCase,
)
from bookshop.adapters.http.fastapi.schemas import (
    AddCartItemRequest,
    LoginRequest,
    MessageResponse,
    OrderStatusRequest,
    PlaceOrderRequest,
    RegisterRequest,
    ReviewRequest,
    UpdateCartItemRequest,
)
from bookshop.adapters.security.hasher import SimplePasswordHasher
from bookshop.bootstrap import UnitOfWorkFactory, build_uow_factory
from bookshop.config import Settings
from bookshop.domain.catalog import Category, CategoryData, Product, ProductData, ProductFlag, ProductWithDetails, Review, ReviewData, ReviewWithUser
from bookshop.domain.cart import CartWithItems
from bookshop.domain.order import Order, OrderWithItems
from bookshop.domain.errors import (
    DataIntegrityError,
    DomainError,
    DuplicateEmailError,
    DuplicateUsernameError,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# ドメイン例外 → HTTP ステータス (未登録のものは 400)
_ERROR_STATUS: dict[type[DomainError], int] = {
    DuplicateEmailError: 409,
    DuplicateUsernameError: 409,
    DataIntegrityError: 409,
}

###################################
# 依存関係
###################################

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_uow(request: Request) -> UnitOfWork:
    return request.app.state.uow_factory()

def get_hasher() -> PasswordHasher:
    return SimplePasswordHasher()

# セッション管理は対象外なので、呼び出し元のユーザーは X-User-Id ヘッダーで受け取る
def get_current_user(
    x_user_id: int | None = Header(default=None),
    uow: UnitOfWork = Depends(get_uow),
) -> UserOutput:
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    user = GetUserUseCase(uow).execute(x_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user

def require_admin(
    user: UserOutput = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
) -> UserOutput:
    if user.username != settings.admin_username:
        raise HTTPException(status_code=403, detail="Admin privileges required")
    return user

###################################
# アカウント
###################################

@router.post("/api/register", response_model=UserOutput, status_code=201)
def register(
    data: RegisterRequest,
    uow: UnitOfWork = Depends(get_uow),
    hasher: PasswordHasher = Depends(get_hasher),
):
    return RegisterUserUseCase(uow, hasher).execute(RegisterUserInput(**data.model_dump()))

@router.post("/api/login", response_model=UserOutput)
def login(
    data: LoginRequest,
    uow: UnitOfWork = Depends(get_uow),
    hasher: PasswordHasher = Depends(get_hasher),
):
    user = AuthenticateUserUseCase(uow, hasher).execute(data.username, data.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return user

@router.get("/api/user", response_model=UserOutput)
def me(current: UserOutput = Depends(get_current_user)):
    return current

@router.put("/api/users/{user_id}", response_model=UserOutput)
def update_profile(
    user_id: int,
    data: ProfileUpdateInput,
    current: UserOutput = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
    uow: UnitOfWork = Depends(get_uow),
):
    # 本人か管理者のみ更新できる
    if user_id != current.id and current.username != settings.admin_username:
        raise HTTPException(status_code=403, detail="Cannot edit another user's profile")
    user = UpdateProfileUseCase(uow).execute(user_id, data)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user

###################################
# カテゴリ
###################################

@router.get("/api/categories", response_model=list[Category])
def list_categories(uow: UnitOfWork = Depends(get_uow)):
    return ListCategoriesUseCase(uow).execute()

@router.get("/api/categories/{category_id}", response_model=Category)
def get_category(category_id: int, uow: UnitOfWork = Depends(get_uow)):
    category = GetCategoryUseCase(uow).execute(category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category

@router.post("/api/categories", response_model=Category, status_code=201, dependencies=[Depends(require_admin)])
def create_category(data: CategoryData, uow: UnitOfWork = Depends(get_uow)):
    return CreateCategoryUseCase(uow).execute(data)

###################################
# 商品
###################################

@router.get("/api/products", response_model=list[Product])
def list_products(
    category_id: int | None = None,
    search: str | None = None,
    uow: UnitOfWork = Depends(get_uow),
):
    return ListProductsUseCase(uow).execute(category_id=category_id, search=search)

@router.get("/api/products/featured", response_model=list[Product])
def list_featured_products(uow: UnitOfWork = Depends(get_uow)):
    return ListProductsByFlagUseCase(uow).execute(ProductFlag.FEATURED)

@router.get("/api/products/bestselling", response_model=list[Product])
def list_bestselling_products(uow: UnitOfWork = Depends(get_uow)):
    return ListProductsByFlagUseCase(uow).execute(ProductFlag.BESTSELLER)

@router.get("/api/products/new", response_model=list[Product])
def list_new_products(uow: UnitOfWork = Depends(get_uow)):
    return ListProductsByFlagUseCase(uow).execute(ProductFlag.NEW)

@router.get("/api/products/{product_id}", response_model=ProductWithDetails)
def get_product(product_id: int, uow: UnitOfWork = Depends(get_uow)):
    product = GetProductWithDetailsUseCase(uow).execute(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product

@router.post("/api/products", response_model=Product, status_code=201, dependencies=[Depends(require_admin)])
def create_product(data: ProductData, uow: UnitOfWork = Depends(get_uow)):
    product = CreateProductUseCase(uow).execute(data)
    if product is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return product

@router.put("/api/products/{product_id}", response_model=Product, dependencies=[Depends(require_admin)])
def update_product(product_id: int, data: ProductUpdateInput, uow: UnitOfWork = Depends(get_uow)):
    product = UpdateProductUseCase(uow).execute(product_id, data)
    if product is None:
        raise HTTPException(status_code=404, detail="Product or category not found")
    return product

@router.delete("/api/products/{product_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
def delete_product(product_id: int, uow: UnitOfWork = Depends(get_uow)):
    if DeleteProductUseCase(uow).execute(product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return MessageResponse(success=True, message="Product removed from sale")

###################################
# レビュー
###################################

@router.get("/api/products/{product_id}/reviews", response_model=list[ReviewWithUser])
def list_reviews(product_id: int, uow: UnitOfWork = Depends(get_uow)):
    return ListProductReviewsUseCase(uow).execute(product_id)

@router.post("/api/products/{product_id}/reviews", response_model=Review, status_code=201)
def create_review(
    product_id: int,
    data: ReviewRequest,
    current: UserOutput = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
):
    review = CreateReviewUseCase(uow).execute(
        ReviewData(product_id=product_id, user_id=current.id, rating=data.rating, comment=data.comment)
    )
    if review is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return review

###################################
# カート
###################################

def _cart_response(uow: UnitOfWork, cart_id: int) -> CartWithItems:
    cart = GetCartWithItemsUseCase(uow).execute(cart_id)
    if cart is None:
        raise HTTPException(status_code=404, detail="Cart not found")
    return cart

@router.get("/api/cart", response_model=CartWithItems)
def get_cart(current: UserOutput = Depends(get_current_user), uow: UnitOfWork = Depends(get_uow)):
    cart = GetOrCreateCartUseCase(uow).execute(current.id)
    return _cart_response(uow, cart.id)

@router.post("/api/cart/items", response_model=CartWithItems)
def add_cart_item(
    data: AddCartItemRequest,
    current: UserOutput = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
):
    cart = GetOrCreateCartUseCase(uow).execute(current.id)
    item = AddCartItemUseCase(uow).execute(cart.id, data.product_id, data.quantity)
    if item is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return _cart_response(uow, cart.id)

@router.put("/api/cart/items/{item_id}", response_model=CartWithItems)
def update_cart_item(
    item_id: int,
    data: UpdateCartItemRequest,
    current: UserOutput = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
):
    cart = GetOrCreateCartUseCase(uow).execute(current.id)
    item = UpdateCartItemQuantityUseCase(uow).execute(item_id, data.quantity, cart_id=cart.id)
    if item is None:
        raise HTTPException(status_code=404, detail="Cart item not found")
    return _cart_response(uow, cart.id)

@router.delete("/api/cart/items/{item_id}", response_model=CartWithItems)
def remove_cart_item(
    item_id: int,
    current: UserOutput = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
):
    cart = GetOrCreateCartUseCase(uow).execute(current.id)
    if not RemoveCartItemUseCase(uow).execute(item_id, cart_id=cart.id):
        raise HTTPException(status_code=404, detail="Cart item not found")
    return _cart_response(uow, cart.id)

@router.delete("/api/cart", response_model=CartWithItems)
def clear_cart(current: UserOutput = Depends(get_current_user), uow: UnitOfWork = Depends(get_uow)):
    cart = GetOrCreateCartUseCase(uow).execute(current.id)
    ClearCartUseCase(uow).execute(cart.id)
    return _cart_response(uow, cart.id)

###################################
# 注文
###################################

@router.post("/api/orders", response_model=Order, status_code=201)
def place_order(
    data: PlaceOrderRequest,
    current: UserOutput = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
):
    return PlaceOrderUseCase(uow).execute(current.id, data.address, data.phone)

@router.get("/api/orders", response_model=list[Order])
def list_orders(current: UserOutput = Depends(get_current_user), uow: UnitOfWork = Depends(get_uow)):
    return ListUserOrdersUseCase(uow).execute(current.id)

@router.get("/api/orders/{order_id}", response_model=OrderWithItems)
def get_order(
    order_id: int,
    current: UserOutput = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
):
    order = GetOrderWithItemsUseCase(uow).execute(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    if order.user_id != current.id:
        raise HTTPException(status_code=403, detail="You cannot access this order")
    return order

@router.put("/api/orders/{order_id}/status", response_model=Order, dependencies=[Depends(require_admin)])
def update_order_status(order_id: int, data: OrderStatusRequest, uow: UnitOfWork = Depends(get_uow)):
    order = UpdateOrderStatusUseCase(uow).execute(order_id, data.status)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order

@router.get("/")
def root():
    return {"status": "ok", "service": "ergili-bookshop"}

###################################
# アプリケーション
###################################

def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = _ERROR_STATUS.get(type(exc), 400)
    if isinstance(exc, DataIntegrityError):
        logger.error(f"{request.method} {request.url.path}: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {type(exc).__name__}: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "error": type(exc).__name__})

def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors(include_url=False, include_context=False, include_input=False)},
    )

def create_app(settings: Settings | None = None, uow_factory: UnitOfWorkFactory | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="ErgiliBookShop API")
    app.state.settings = settings
    app.state.uow_factory = uow_factory or build_uow_factory(settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.include_router(router)
    return app
