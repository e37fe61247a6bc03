from barstatus.models.bar import Bar
