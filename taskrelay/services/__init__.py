"""
TaskRelay Backend — Services Layer
===================================

What:  Everything between the routes and the third-party APIs.

Service Inventory:
    - aggregator:          group tasks by project, sort, render JSON/markdown (pure)
    - due_date:            lift a date phrase out of task text (pure)
    - amount:              largest-plausible-number heuristic for receipts (pure)
    - TodoistService:      task service adapter (httpx)
    - SheetsService:       expense ledger writer (Google Sheets API)
    - OcrService:          abstract image-to-text interface
    - GeminiOcrService:    OcrService backed by Gemini vision
    - UploadService:       receipt upload validation
    - TaskService:         task route orchestration
    - ExpenseService:      expense route orchestration

Adapters hold configuration only. They are built by create_app() from one
Settings value; nothing here is a process-wide singleton.
"""
