"""
Use Cases Layer (Business Operations)

Structure
---------
usecases/
├── sees/    # SEES records: list, get, create, update, delete, render
└── users/   # User management (admin)

Usage
-----
    from sees_console.application.usecases.sees import CreateSeesUseCase
    from sees_console.application.usecases.users import CreateUserUseCase
"""
