class DomainError(Exception): ...
class DuplicateEmailError(DomainError): ...
class DuplicateUsernameError(DomainError): ...
class EmptyCartError(DomainError): ...
class ProductUnavailableError(DomainError): ...
class InvalidStatusTransitionError(DomainError): ...

# 数量は呼び出し側でも検証されるが、ValueError として扱えるようにする
class InvalidQuantityError(DomainError, ValueError): ...

# 外部キーの参照先が存在しない (例: カート明細の商品が消えている)
class DataIntegrityError(DomainError): ...
