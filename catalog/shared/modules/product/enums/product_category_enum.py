from enum import Enum

class ProductCategory(str, Enum):
    ELECTRONICS = "Electronics"
    BOOKS = "Books"
    CLOTHING = "Clothing"
    FOOD = "Food"
