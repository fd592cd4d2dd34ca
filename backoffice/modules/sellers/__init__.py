"""
Módulo de Vendedores

- Seller: vendedor en consignación con slug para su tienda pública
- SellerDirectory: consultas por id, slug y nombre
- SellerService: alta, edición, baja y resolución por slug/nombre/id

Slug: primera palabra del nombre, en minúsculas, sin acentos ni caracteres
especiales; si ya existe se agrega un sufijo numérico (ana, ana2, ana3...).
"""

from .models import Seller

__all__ = ["Seller"]
