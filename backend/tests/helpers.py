def drain(sio_client):
    """Return received packets as (event name, first argument) pairs."""
    return [(pkt['name'], pkt['args'][0] if pkt['args'] else None) for pkt in sio_client.get_received()]


def events(received, name):
    return [payload for event, payload in received if event == name]


def names(received):
    return [event for event, _ in received]


def pick(sio_client, char_id):
    """Select a character and return the connection id the server assigned it."""
    sio_client.emit('selectCharacter', char_id)
    for roster in reversed(events(drain(sio_client), 'updatePlayers')):
        for sid, player in roster.items():
            if player['charId'] == char_id:
                return sid
    raise AssertionError(f'character {char_id!r} was not granted')
