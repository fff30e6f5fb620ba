"""GraphQL queries against the Drips subgraph."""

get_user_asset_config_by_id = """
query getUserAssetConfigById($configId: ID!) {
  userAssetConfig(id: $configId) {
    id
    assetId
    dripsEntries {
      id
      userId
      config
    }
    balance
    amountCollected
    lastUpdatedBlockTimestamp
  }
}
"""

get_all_user_asset_configs_by_user_id = """
query getAllUserAssetConfigsByUserId($userId: ID!, $first: Int!, $skip: Int!) {
  user(id: $userId) {
    assetConfigs(first: $first, skip: $skip) {
      id
      assetId
      dripsEntries {
        id
        userId
        config
      }
      balance
      amountCollected
      lastUpdatedBlockTimestamp
    }
  }
}
"""

get_splits_config_by_user_id = """
query getSplitsConfigByUserId($userId: ID!, $first: Int!, $skip: Int!) {
  user(id: $userId) {
    splitsEntries(first: $first, skip: $skip) {
      id
      userId
      weight
    }
  }
}
"""

get_drips_set_events_by_user_id = """
query getDripsSetEventsByUserId($userId: String!, $first: Int!, $skip: Int!) {
  dripsSetEvents(
    where: {userId: $userId}, first: $first, skip: $skip, orderBy: blockTimestamp, orderDirection: asc
  ) {
    id
    userId
    assetId
    dripsReceiverSeenEvents {
      id
      receiverUserId
      config
    }
    dripsHistoryHash
    balance
    blockTimestamp
    maxEnd
  }
}
"""

get_drips_receiver_seen_events_by_receiver_id = """
query getDripsReceiverSeenEventsByReceiverId($receiverUserId: String!, $first: Int!, $skip: Int!) {
  dripsReceiverSeenEvents(
    where: {receiverUserId: $receiverUserId}, first: $first, skip: $skip, orderBy: blockTimestamp, orderDirection: asc
  ) {
    id
    config
    senderUserId
    receiverUserId
    dripsSetEvent {
      id
      assetId
    }
    blockTimestamp
  }
}
"""

get_squeezed_drips_events_by_user_id = """
query getSqueezedDripsEventsByUserId($userId: String!, $first: Int!, $skip: Int!) {
  squeezedDripsEvents(
    where: {userId: $userId}, first: $first, skip: $skip, orderBy: blockTimestamp, orderDirection: asc
  ) {
    id
    userId
    assetId
    senderId
    amt
    blockTimestamp
    dripsHistoryHashes
  }
}
"""

get_received_drips_events_by_user_id = """
query getReceivedDripsEventsByUserId($userId: String!, $first: Int!, $skip: Int!) {
  receivedDripsEvents(
    where: {userId: $userId}, first: $first, skip: $skip, orderBy: blockTimestamp, orderDirection: asc
  ) {
    id
    userId
    assetId
    amt
    receivableCycles
    blockTimestamp
  }
}
"""
