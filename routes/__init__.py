from routes import articles, auth, dashboard, exchange_requests, history, posts, users

ROUTERS = (
    auth.router,
    dashboard.router,
    articles.router,
    posts.router,
    exchange_requests.router,
    history.router,
    users.router,
)
