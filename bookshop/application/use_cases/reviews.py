from bookshop.application.ports import UnitOfWork
from bookshop.domain.catalog import Review, ReviewAuthor, ReviewData, ReviewWithUser


class ListProductReviewsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, product_id: int) -> list[ReviewWithUser]:
        with self.uow:
            out = []
            for review in self.uow.reviews.list_by_product(product_id):
                user = self.uow.users.get(review.user_id)
                author = None
                if user is not None:
                    author = ReviewAuthor(
                        id=user.id,
                        username=user.username,
                        full_name=user.full_name,
                        avatar=user.avatar,
                    )
                out.append(ReviewWithUser(**review.model_dump(), user=author))
            return out


class CreateReviewUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    # 同じユーザーが同じ商品に複数回レビューすることは許可する
    def execute(self, data: ReviewData) -> Review | None:
        with self.uow:
            if self.uow.products.get(data.product_id) is None:
                return None
            review = self.uow.reviews.add(data)
            self.uow.commit()
            return review
