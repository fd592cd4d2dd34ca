"""Back-office de ventas en consignación: notas de salida, pagos y saldos de vendedores."""
