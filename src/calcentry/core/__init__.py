"""
Core: конфигурация, десятичная математика и доменные типы.

Не зависит от представления (виджеты, окна, локализация подписей).
"""
