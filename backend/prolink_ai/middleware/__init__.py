# Middleware package init
"""
Prolink AI - Middleware Package
=================================

Request -> [Request ID] -> [Access log] -> [CORS] -> route handler

RequestIDMiddleware runs first so the access log line and any exception
handler can read the id from request_id_var.
"""
