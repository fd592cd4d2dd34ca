"""
Módulo de Saldos

Saldo del vendedor calculado siempre desde las notas y los pagos:
historic_debt - total_payments = current_debt (negativo = crédito).
Incluye el resumen de todos los vendedores y el estado de cuenta (JSON/CSV).
"""
