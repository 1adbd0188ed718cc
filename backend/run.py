from riddlescape import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Use SocketIO server so timer ticks reach the browser in dev
    socketio.run(app, debug=True, port=5000)
