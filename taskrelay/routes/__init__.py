"""
TaskRelay Backend — API Routes Package
=======================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - health.py:    GET  /health, GET /ping
    - tasks.py:     POST /api/tasks, GET /api/tasks,
                    POST /api/tasks/{id}/close, POST /api/tasks/{id}/reopen
    - expenses.py:  POST /api/expenses, POST /api/expenses/receipt

Design Principle:
    Routes are thin: pull data out of the request, call a service, shape the
    response. Errors are raised, never returned; the global handlers in
    main.py format them.
"""
