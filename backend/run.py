from nanoquiz import create_app, get_registry, socketio

app = create_app()

if __name__ == '__main__':
    try:
        socketio.run(app, host=app.config['HOST'], port=app.config['PORT'], debug=True)
    finally:
        get_registry(app).shutdown()
