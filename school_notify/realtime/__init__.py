"""Realtime infrastructure (Socket.IO).

One socket server carries chat, presence, typing indicators and
announcement pushes. Connection handling lives in :mod:`.hub`; the
``socketio`` module only binds it to the python-socketio server.
"""
